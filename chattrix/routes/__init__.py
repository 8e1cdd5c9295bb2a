"""JSON blueprints: auth, direct messages, groups."""
