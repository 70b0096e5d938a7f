"""
Conversational layer on top of the ranking engine.

Responsibilities:
- Extract structured ticket preferences from chat messages (rules or Groq).
- Accumulate preferences across the turns of one conversation.
- Turn a message into a reply with ranked suggestions.
"""
