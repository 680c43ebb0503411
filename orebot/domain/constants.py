from __future__ import annotations

# Program and token addresses
PROGRAM_ID = "oreV3EG1i9BEgiAJ8b177Z2S2rMarzak4NMv1kULvWv"
SYSTEM_PROGRAM_ID = "11111111111111111111111111111111"
ENTROPY_PROGRAM_ID = "3jSkUuYBoJzQPMEzTvkDFXCZUBksPamrVhrnHR9igu2X"
ORE_MINT = "oreoU2P8bN6jkk3jbaiVxYnG1dCXcYxwhwyK9jSybcp"
SOL_MINT = "So11111111111111111111111111111111111111112"

# PDA seeds
BOARD_SEED = b"board"
ROUND_SEED = b"round"
MINER_SEED = b"miner"
AUTOMATION_SEED = b"automation"
TREASURY_SEED = b"treasury"
VAR_SEED = b"var"
ACCOUNT_DISCRIMINATOR_SIZE = 8

# Instruction opcodes
OP_CHECKPOINT = 2
OP_CLAIM_SOL = 3
OP_DEPLOY = 6

# Ledger timing
MS_PER_SLOT = 400
TRIGGER_WINDOW_SECONDS = 8

# Units
LAMPORTS_PER_SOL = 1_000_000_000
ORE_PER_UNIT = 1 / 10**11

# Game mechanics / EV model
NUM_SLOTS = 25
PROTOCOL_CUT = 0.10
ADMIN_FEE = 0.01
P_WIN = 1 / NUM_SLOTS
HIT_PROB = 1 / 625
REF_MULT = 0.9
BASE_REWARD = 1.0
DEFAULT_MOTHERLODE = 0.2
ADMIN_COST_FACTOR = ADMIN_FEE / (1 - ADMIN_FEE)
C = (NUM_SLOTS - 1) + ADMIN_COST_FACTOR / P_WIN
REFINE_ITERATIONS = 3

# Transaction tuning
COMPUTE_UNIT_LIMIT = 750_000
COMPUTE_UNIT_PRICE_MICROLAMPORTS = 100_000
