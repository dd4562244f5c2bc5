# AFC contest platform
