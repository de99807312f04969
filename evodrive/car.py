"""

 ██████  █████  ██████     ██████  ██    ██ 
██      ██   ██ ██   ██    ██   ██  ██  ██  
██      ███████ ██████     ██████    ████   
██      ██   ██ ██   ██    ██         ██    
 ██████ ██   ██ ██   ██ ██ ██         ██    
                                            
                                            
 
Car class and related functionality for the AI driving simulation.
Contains the Car agent (genome, sensor reading, last prediction, fitness),
the decision mapping from network output to controls, and the kinematic
movement step.
"""

import math
from collections import namedtuple

from .ai_models import Net
from .constants import *
from .raycast import Pose

# wasd controls
CarControls = namedtuple("CarControls", ["forward", "left", "brake", "right"])


def map_decision(
    trace,
    steer_threshold=NN_STEER_THRESHOLD,
    throttle_threshold=NN_W_ACTIVATION_THRESHOLD,
    brake_threshold=NN_S_ACTIVATION_THRESHOLD,
    always_throttle=ALWAYS_THROTTLE,
    use_brake=USE_BRAKE,
):
    """Map the last layer of a prediction trace to CarControls.

    Outputs are read as ``[steer]``, ``[throttle, steer]`` or
    ``[throttle, steer, brake, ...]`` depending on how many there are.
    Steering is always one of left or right.
    """
    out = trace[-1]
    if not out:
        raise ValueError("Prediction trace has an empty output layer")

    if len(out) == 1:
        steer = out[0]
        forward = always_throttle
    else:
        steer = out[1]
        forward = always_throttle or out[0] >= throttle_threshold
    brake = use_brake and len(out) >= 3 and out[2] >= brake_threshold

    left = steer >= steer_threshold
    return CarControls(forward, left, brake, not left)


def position_based_movement(controls, x, y, heading, time_step=TIME_STEP):
    """Advance a pose by one tick of the given controls. Returns (x, y, heading)."""
    rotation_factor = 0.0
    movement_factor = 0.0

    if controls.forward and not controls.brake:
        movement_factor += CAR_MOVEMENT_FACTOR
    if controls.left:
        rotation_factor += CAR_ROTATION_FACTOR
    elif controls.right:
        rotation_factor -= CAR_ROTATION_FACTOR

    heading += rotation_factor * CAR_TURN_RATE * time_step
    # Forward is local +y
    x -= math.sin(heading) * movement_factor
    y += math.cos(heading) * movement_factor
    return x, y, heading


class Car:
    def __init__(self, x, y, brain=None, heading=0.0, layer_sizes=None, activation=ACTIVATION, generator=None):
        # Core state
        self.x = x
        self.y = y
        self.heading = heading

        # Status
        self.alive = True
        self.fitness = 0.0
        self.time_alive = 0

        # AI network
        if brain is None:
            if layer_sizes is None:
                layer_sizes = [NUM_RAY_CASTS, NUM_HIDDEN_NODES, NUM_OUTPUT_NODES]
            brain = Net(layer_sizes, activation=activation, generator=generator)
        self.brain = brain

        # Sensors and last prediction, read by visualization
        self.ray_inputs = []
        self.nn_outputs = []
        self.controls = CarControls(False, False, False, False)

    @property
    def pose(self):
        return Pose(self.x, self.y, self.heading)

    def update_sensors(self, sensor_model, cast_fn):
        self.ray_inputs = sensor_model.sense(self.pose, cast_fn)
        return self.ray_inputs

    def think(self, **decision_kwargs):
        if not self.ray_inputs:
            self.controls = CarControls(False, False, False, False)
            return self.controls
        self.nn_outputs = self.brain.predict(self.ray_inputs)
        self.controls = map_decision(self.nn_outputs, **decision_kwargs)
        return self.controls

    def move(self, time_step=TIME_STEP):
        self.x, self.y, self.heading = position_based_movement(
            self.controls, self.x, self.y, self.heading, time_step
        )
        self.time_alive += 1

    def crash(self):
        """Take the car out of the live set. Brain and fitness stay readable."""
        self.alive = False
