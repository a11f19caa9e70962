"""
Seat Management Microservice

Responsibilities:
- Seat catalog registration per product
- Short-lived exclusive seat locks in Kvrocks
- Payment result reconciliation (LOCKED -> RESERVED / AVAILABLE)
"""
