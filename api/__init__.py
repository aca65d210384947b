"""API package - HTTP routes, dependencies, pages and middleware"""
