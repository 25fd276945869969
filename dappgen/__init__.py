"""dappgen -- scaffold React Native projects with Web3 built in."""

__version__ = "0.1.0"
