"""Fixed combat rules and tunable limits shared across the simulator."""

# Map symbols
WALL_SYMBOL = "#"
OPEN_SYMBOL = "."
ELF_SYMBOL = "E"
GOBLIN_SYMBOL = "G"

# Unit defaults
DEFAULT_HIT_POINTS = 200
DEFAULT_ATTACK_POWER = 3

# Attack-power search stops here; any unit dies in one hit well before this.
MAX_ATTACK_POWER = 200

# Guard for boards whose combat never terminates.
MAX_ROUNDS = 10_000
