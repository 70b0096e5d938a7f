"""
Semantic matching and ranking engine.

Responsibilities:
- Score cached package vectors against a query vector (linear scan or FAISS).
- Score packages against structured preferences with weighted attribute rules.
- Threshold, sort and truncate scores into a top-K list with reasons.
- Report which scoring path served the last request.
"""
