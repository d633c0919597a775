"""
Entitlements package - answers "may the current actor use feature X".

One ``EntitlementCache`` per signed-in actor holds that actor's subscription;
``EntitlementGate`` is the query surface the rest of the app uses.
"""
