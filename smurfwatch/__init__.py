"""smurfwatch: smurf-likelihood analysis over Riot API match history."""

__version__ = "0.1.0"
