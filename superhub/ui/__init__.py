"""CustomTkinter presentation layer.  Contains no session rules."""
