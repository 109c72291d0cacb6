"""
Subscribers + email campaigns.

- Public opt-in with idempotent re-subscribe
- Hash-stored, time-limited unsubscribe tokens
- Campaign history and stub delivery through the configured mailer
"""
