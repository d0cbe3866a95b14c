# Carrier-agnostic request/response schemas
