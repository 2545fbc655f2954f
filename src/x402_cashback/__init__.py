"""x402 facilitator that pays cashback to payers after settlement."""

__version__ = "0.1.0"
