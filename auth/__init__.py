"""
auth — User authentication module.

Provides:
  • Token creation & verification (``TokenService``)
  • Password hashing (bcrypt, run off the event loop)
  • ``get_current_user`` FastAPI dependency (bearer header or cookie)
"""
