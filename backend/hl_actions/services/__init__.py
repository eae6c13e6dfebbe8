"""
Service layer modules.

These modules encapsulate the action logic:
- Resolving the environment to a chain and acquiring the wallet context
- Pricing market orders from the mark-price gateway
- Composing entry orders and their TP/SL triggers
- Talking to Hyperliquid through the official SDK
- Recording every attempted action in the audit log
"""
