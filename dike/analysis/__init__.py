"""Assignment analysis: provider-response normalization.

Input:  raw completion text from the AI provider
Output: AnalysisRecord (parsed barriers shape, or six-dimension fallback)
"""
