"""Game domain services: content, question editing, access checks and scoring.

The content, documents, projection and scoring modules are pure and work on
in-memory values; ownership and repository talk to the database; service
ties them together for the HTTP blueprints.
"""
