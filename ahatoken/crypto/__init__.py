from .address import generate_accounts, generate_contract_address, transaction_hash

__all__ = ["generate_accounts", "generate_contract_address", "transaction_hash"]
