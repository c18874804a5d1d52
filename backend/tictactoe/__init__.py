"""Tic-tac-toe session host: FastAPI WebSocket server."""
