"""Event Snap: time-boxed shared photo albums."""
