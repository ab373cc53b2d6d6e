"""ShopMaze - arcade maze game with a remote control channel."""

__version__ = "2.1.0"
