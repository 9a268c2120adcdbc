"""Clock daemon and command-line tools for CFA635 displays."""
