"""
CareerFlow
Career platform backend: job board, community forum, resource library,
counseling sessions and an AI career coach.

Architecture:
- MongoDB: all documents (users, jobs, applications, posts, replies, resources, sessions)
- Hosted generative model: AI coach only (not a database!)
"""

__version__ = "1.0.0"
