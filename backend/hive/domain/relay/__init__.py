"""Real-time relay: session registry, typed events and the Socket.IO namespace."""
