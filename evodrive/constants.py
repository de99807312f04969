"""

 ██████  ██████  ███    ██ ███████ ████████  █████  ███    ██ ████████ ███████    ██████  ██    ██ 
██      ██    ██ ████   ██ ██         ██    ██   ██ ████   ██    ██    ██         ██   ██  ██  ██  
██      ██    ██ ██ ██  ██ ███████    ██    ███████ ██ ██  ██    ██    ███████    ██████    ████   
██      ██    ██ ██  ██ ██      ██    ██    ██   ██ ██  ██ ██    ██         ██    ██         ██    
 ██████  ██████  ██   ████ ███████    ██    ██   ██ ██   ████    ██    ███████ ██ ██         ██    
                                                                                                   
                                                                                                   

Constants and configuration settings for the AI driving simulation.
Contains the default values for the network, sensors, evolution and track.
Everything here can be overridden through evodrive.config.TrainingConfig.
"""

# Population and simulation settings
POPULATION_SIZE = 30
TIME_STEP = 1.0 / 60.0
MAX_GENERATION_TICKS = 0  # 0 = generation ends only when every car is gone

# Raycast configuration
NUM_RAY_CASTS = 8
RAYCAST_SPREAD_ANGLE_DEG = 140.0
RAYCAST_START_ANGLE_DEG = 20.0
RAYCAST_MAX_TOI = 250.0
# "uniform": every ray is RAYCAST_MAX_TOI long
# "cycling": full, half, third of RAYCAST_MAX_TOI by ray index % 3
RAYCAST_LENGTH_POLICY = "uniform"
RAYCAST_HIT_SCALE = 1.0  # < 1 separates "hit at max range" from "no hit"

# Neural network
NUM_HIDDEN_NODES = 15
NUM_OUTPUT_NODES = 3
ACTIVATION = "sigmoid"  # or "clamped_linear"
BRAIN_MUTATION_RATE = 5.0  # probability per weight, >= 1 means every weight
BRAIN_MUTATION_VARIATION = 0.5

# Decision mapping (network output -> controls)
NN_W_ACTIVATION_THRESHOLD = 0.3
NN_STEER_THRESHOLD = 0.5
NN_S_ACTIVATION_THRESHOLD = 0.8
ALWAYS_THROTTLE = True
USE_BRAKE = False

# Movement
CAR_MOVEMENT_FACTOR = 3.5
CAR_ROTATION_FACTOR = 0.5
CAR_TURN_RATE = 5.0

# Fitness
FITNESS_FLOOR = 0.1
FITNESS_PROGRESS_THRESHOLD = 600.0
FITNESS_NORMALIZATION = 340.0

# Genome persistence
BEST_GENOME_PATH = "trained_models/best_genome.pt"
SAVE_BEST_GENOME = False
LOAD_SAVED_GENOME = False

# Track geometry
WINDOW_HEIGHT = 1000.0
ROAD_X_MIN = 738.0
ROAD_X_MAX = 1180.0
CAR_SPAWN_X_MIN = 800.0
CAR_SPAWN_X_MAX = 1100.0
CAR_SPAWN_Y = WINDOW_HEIGHT / 2.0

# Obstacles
NUM_ENEMY_CARS = 140
ENEMY_START_Y = 800.0
ENEMY_SPACING_Y = 200.0
ENEMY_X_MIN = 743.0
ENEMY_X_MAX = 1169.0
ENEMY_SPEED = 50.0
ENEMY_HORIZONTAL_SPEED = 30.0
ENEMY_HALF_EXTENTS = (10.0, 20.0)
TRUCK_HALF_EXTENTS = (18.0, 45.0)
TRACK_END_Y = ENEMY_START_Y + NUM_ENEMY_CARS * ENEMY_SPACING_Y + 800.0

# Bound control trucks sweep up from behind and remove stragglers
BOUND_START_Y = 100.0
BOUND_SPEED = 1.0  # units per tick
