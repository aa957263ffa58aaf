"""Web-Portfolio: static portfolio generator and link checker."""
