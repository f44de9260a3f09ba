"""Describes the Kitchen Remix domain. Centres around the `RemixSession`.

What is there to it?

- Recipes come from a vision model served behind an api.
  The reply is untrusted JSON so it gets checked against a schema.
- Sharing goes out through the WhatsApp Cloud API.
- Nothing is stored. Every result lives for one request.

Both external services are injected so they can be faked.
The session does not care whether it talks to them in-process or over http.
"""
