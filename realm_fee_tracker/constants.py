"""Program ids and unit constants shared across layers."""

# SPL Governance program (mainnet deployment used by most realms)
GOVERNANCE_PROGRAM_ID = "GovER5Lthms3bLBqWub97yVrMmEogzX7xNjdXpPPCVZw"
# SPL Governance chat program (proposal comments)
GOVERNANCE_CHAT_PROGRAM_ID = "gCHAtYKrUUktTVzE4hEnZdLV4LXrdBf6Hh9qMaJALET"

LAMPORTS_PER_SOL = 1_000_000_000

DEFAULT_RPS = 10
DEFAULT_MAX_CONCURRENCY = 10
