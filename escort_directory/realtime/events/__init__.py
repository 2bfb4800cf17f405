"""Realtime publishers.

These modules contain *publish* helpers only (build payload + emit through an
``EventSink``). They must not hold state or register Socket.IO handlers.
"""
