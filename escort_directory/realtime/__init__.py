"""Realtime infrastructure (Socket.IO presence and direct messaging).

Everything in here shares one Socket.IO server per process. Components are
plain objects wired together by :class:`~escort_directory.realtime.hub.ChatHub`
so tests can build isolated instances without a running server.
"""
