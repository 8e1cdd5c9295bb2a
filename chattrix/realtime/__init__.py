"""Real-time synchronization layer.

Presence, room subscriptions, delivery state, reactions and typing relay.
Socket.IO handlers live in ``chattrix.realtime.gateway`` and are registered by
``create_app`` importing that module; nothing here imports the Flask
extensions so the package can be loaded while they are being built.
"""
