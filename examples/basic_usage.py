#!/usr/bin/env python3
"""
Example: A custodial bank from construction to withdrawal

Walks through the full customer lifecycle with a manual clock so the
interest accrued between calls is easy to follow.
"""

import os
import sys
from decimal import Decimal

# Add the ledger package to the path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from custodial_ledger.clock import ManualClock
from custodial_ledger.component import BankComponent
from custodial_ledger.config import LedgerConfig
from custodial_ledger.errors import LedgerError
from custodial_ledger.logging_config import setup_logging
from custodial_ledger.vault import Funds


def main():
    print("🏦 Custodial Ledger - Basic Usage Example")
    print("=" * 60)

    config = LedgerConfig()
    setup_logging(config.log_level, log_format=config.log_format)
    clock = ManualClock(start=0)

    print("\n1. 🔧 Construct the bank")
    component, admin_badge = BankComponent.instantiate(
        Funds(Decimal('1000')), config=config, clock=clock
    )
    print(f"   Pooled funds: {component.bank.pooled_funds}")

    print("\n2. 👤 Register a customer")
    customer_badge, badge_type = component.register("Satoshi", "Nakamoto")
    customer_id = component.issuer.resolve(customer_badge).badge_id
    print(f"   Badge type: {badge_type}")
    print(f"   {component.describe(admin_badge, customer_id)}")

    print("\n3. 🚫 Deposit before KYC")
    try:
        component.deposit(customer_badge, Decimal('100'), Funds(Decimal('100')))
    except LedgerError as e:
        print(f"   Rejected: {type(e).__name__}: {e}")

    print("\n4. ✅ Verify the customer")
    component.mark_known(admin_badge, customer_id)
    print(f"   {component.describe(admin_badge, customer_id)}")

    print("\n5. 💰 Deposit 100, wait 10 epochs, deposit 50")
    wallet = Funds(Decimal('500'))
    wallet = component.deposit(customer_badge, Decimal('100'), wallet)
    clock.advance(10)
    wallet = component.deposit(customer_badge, Decimal('50'), wallet)
    print(f"   Wallet: {wallet.amount}")
    print(f"   {component.describe(admin_badge, customer_id)}")

    print("\n6. 🏧 Withdraw 200")
    withdrawn = component.withdraw(customer_badge, Decimal('200'))
    print(f"   Withdrawn: {withdrawn.amount}")
    print(f"   {component.describe(admin_badge, customer_id)}")
    print(f"   Pooled funds: {component.bank.pooled_funds}")

    if component.bank.audit_trail is not None:
        print("\n7. 🔒 Audit trail")
        integrity = component.bank.audit_trail.verify_integrity()
        print(f"   Events: {integrity['total_events']}, valid: {integrity['valid']}")


if __name__ == "__main__":
    main()
