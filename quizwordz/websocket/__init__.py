"""
WebSocket Package

Real-time game updates over Socket.IO.
"""
