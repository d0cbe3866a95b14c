# Core: config, errors, HTTP transport
