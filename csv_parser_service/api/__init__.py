"""HTTP surface: health probe and development-mode parse endpoints."""
