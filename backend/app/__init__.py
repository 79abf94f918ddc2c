"""ScreenSight backend."""
