"""HTTP interface: dependencies, error handlers and routers."""
