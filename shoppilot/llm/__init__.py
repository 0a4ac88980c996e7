"""
LLM integration layer.

Responsibilities:
- Manage Groq API configuration and credentials.
- Build the ranking prompt from the user's query, location and nearby shops.
- Call Groq once, with a timeout, and hand back the raw completion text.
- Parse the completion into recommendation dicts, tolerating chatter
  around the JSON array.
"""
