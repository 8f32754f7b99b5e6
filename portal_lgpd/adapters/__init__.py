"""
Adapters - implementações de infraestrutura dos ports do core.
"""
