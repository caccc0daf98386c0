"""
CRM Assistant Gateway - sales assistant chat service.

This service answers sales users' questions with a Gemini model by:
1. Building the conversation history with a fixed priming exchange
2. On the first turn, collecting leads, partners, products and orders (in parallel)
3. Rendering that snapshot into the first user message
4. Streaming the model's reply back as Server-Sent Events
"""

__version__ = "0.1.0"
