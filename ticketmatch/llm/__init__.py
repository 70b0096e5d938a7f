"""
LLM integration layer.

Responsibilities:
- Manage Groq API configuration and credentials.
- Let the chat layer extract ticket preferences with an LLM when configured.
- Leave the rule-based extractor in charge when the LLM is disabled or failing.
"""
