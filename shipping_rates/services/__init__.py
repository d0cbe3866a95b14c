# Services layer: UPS OAuth and Rating API clients
