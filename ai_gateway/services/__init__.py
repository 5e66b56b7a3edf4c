"""Gateway services: model routing, the cached generation gateway, and the
idea / insights / roadmap callers built on top of it."""
