"""
Service layer abstraction.

Services encapsulate the state and business rules of a domain so that
the routing layer only binds parameters and renders outcomes.  The
catalog lives in memory; swapping it for a database would only touch
this package.
"""
