"""
SkillSwap

Skill-exchange matching and swap lifecycle service.

Layers:
- directory: user profiles (skills offered/wanted, availability, rating)
- matching:  browse/match query engine over the directory
- swaps:     swap request state machine with bilateral rating
- api:       FastAPI routers and error mapping
"""

__version__ = "1.0.0"
