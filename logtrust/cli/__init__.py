"""
logtrust CLI - offline transparency log verification

Commands:
- logtrust keys generate - Create signing keys and registry entries
- logtrust checkpoint sign/verify - Signed checkpoints and root identifiers
- logtrust records sign/validate - Package log record signatures
"""
