"""VoiceMentor - mentorship matching service.

Domain models, the reducer pipeline behind the interactive workspace, and the
REST surface for users, mentors and sessions.
"""
