"""HTTP transport: routers, dependencies and exception handlers."""
