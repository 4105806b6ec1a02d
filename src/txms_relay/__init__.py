"""TxMS Relay - SMS/MMS to blockchain transaction relay."""

__version__ = "0.1.0"
