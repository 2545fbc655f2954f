#!/usr/bin/env python3
"""
Generate test merchant keys for the facilitator.

Prints an EVM key and a Solana keypair in the format expected by .env.
"""

from eth_account import Account
from solders.keypair import Keypair

print("🔑 Generating facilitator test keys...")
print("=" * 60)

evm_account = Account.create()
svm_keypair = Keypair()

print("\n📍 EVM merchant address:")
print(f"   {evm_account.address}")
print("\n📍 Solana fee payer address:")
print(f"   {svm_keypair.pubkey()}\n")

print("=" * 60)
print("\n📝 Copy the following into your .env file:\n")

print(f"EVM_PRIVATE_KEY={evm_account.key.hex()}")
print(f"SVM_PRIVATE_KEY={svm_keypair}")

print("\n" + "=" * 60)
print("\n🪙 Next: fund the wallets")
print("   Base Sepolia ETH + cashback token: https://portal.cdp.coinbase.com/products/faucet")
print(f"   Solana devnet SOL: https://faucet.solana.com/ ({svm_keypair.pubkey()})\n")
print("✅ Then run: x402-cashback-facilitator")
print("=" * 60)
