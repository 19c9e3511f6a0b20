"""Instrumented HTTP(S) server: response sinks, middleware, routes."""
