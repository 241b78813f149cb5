"""
meetpoll - find the meeting time most of the group can make.
"""

__version__ = "0.1.0"
