"""
Turtle interpretation of an expanded symbol sequence into segments.

SYMBOLS
-------
F       forward step; param 0 is the length (policy default if absent)
+ -     yaw about the local up axis
& ^     pitch about the side axis (heading x up); up rotates too
[ ]     push / pop the turtle state (pop on an empty stack does nothing)
other   inert

Turn angles are ``sign * (param0 + jitter)`` degrees, with param 0
defaulting to the policy's default angle and jitter drawn from the
grammar's angle-jitter range.

RANDOM STREAM ORDER
-------------------
Per run: depth taper, radius noise, initial wander yaw, initial wander
pitch. Per forward step: length jitter, wander yaw, wander pitch, then
(auto-randomised grammars only) depth taper and radius noise. Per turn:
angle jitter.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence
import logging
import math

import numpy as np

from arbor_policies import TurtlePolicy
from ..core.grammar import Grammar, Symbol, PUSH, POP
from ..core.segments import Segment, SegmentSet
from ..core.types import Point3D
from ..utils.vectors import normalize, rotate_about_axis, side_axis, orthonormalize_up

logger = logging.getLogger(__name__)

FORWARD = "F"
YAW_LEFT = "+"
YAW_RIGHT = "-"
PITCH_DOWN = "&"
PITCH_UP = "^"

YAW_SIGNS = {YAW_LEFT: 1.0, YAW_RIGHT: -1.0}
PITCH_SIGNS = {PITCH_DOWN: 1.0, PITCH_UP: -1.0}


@dataclass
class VariationSamples:
    """Per-run stochastic samples shared by all forward steps."""
    depth_taper: float
    radius_noise: float


def draw_variation_samples(grammar: Grammar, rng: np.random.Generator) -> VariationSamples:
    taper = float(rng.uniform(*grammar.depth_taper))
    noise = float(rng.uniform(*grammar.radius_scale))
    return VariationSamples(depth_taper=taper, radius_noise=noise)


@dataclass
class TurtleState:
    position: np.ndarray
    heading: np.ndarray
    up: np.ndarray
    parent: Optional[int] = None

    def copy(self) -> "TurtleState":
        return TurtleState(self.position.copy(), self.heading.copy(), self.up.copy(), self.parent)


class Turtle:
    """
    Orientation state machine with an explicit save/restore stack.

    Parameters
    ----------
    grammar : Grammar
        Source of the stochastic ranges and base radius
    rng : np.random.Generator
        Shared run stream
    policy : TurtlePolicy
        Initial frame and defaults
    samples : VariationSamples
        Run-level taper and noise samples
    """

    def __init__(
        self,
        grammar: Grammar,
        rng: np.random.Generator,
        policy: TurtlePolicy,
        samples: VariationSamples,
    ):
        self.grammar = grammar
        self.rng = rng
        self.policy = policy
        self.samples = samples
        self.world_up = normalize(np.asarray(policy.world_up, dtype=float))
        heading = normalize(np.asarray(policy.heading, dtype=float))
        self.state = TurtleState(
            position=np.asarray(policy.start_position, dtype=float),
            heading=heading,
            up=orthonormalize_up(heading, np.asarray(policy.up, dtype=float)),
        )
        self.stack: List[TurtleState] = []
        self.segments = SegmentSet()
        self.skipped_rotations = 0

    # rotations

    def yaw(self, angle_deg: float) -> None:
        self.state.heading = rotate_about_axis(
            self.state.heading, self.state.up, math.radians(angle_deg)
        )

    def pitch(self, angle_deg: float) -> None:
        axis = side_axis(self.state.heading, self.state.up)
        if axis is None:
            self.skipped_rotations += 1
            logger.debug("Degenerate side axis, pitch skipped")
            return
        angle = math.radians(angle_deg)
        self.state.heading = rotate_about_axis(self.state.heading, axis, angle)
        self.state.up = rotate_about_axis(self.state.up, axis, angle)

    def wander(self) -> None:
        yaw = self.rng.uniform(*self.grammar.wander_deg)
        pitch = self.rng.uniform(*self.grammar.wander_deg)
        self.yaw(yaw)
        self.pitch(pitch)

    # symbol handlers

    def forward(self, symbol: Symbol) -> None:
        g = self.grammar
        jitter = self.rng.uniform(*g.length_jitter)
        length = symbol.param(0, self.policy.default_step_length) * jitter
        self.wander()

        start = self.state.position
        end = start + self.state.heading * length

        parent = self.state.parent
        depth = 0 if parent is None else self.segments[parent].depth + 1

        if g.auto_randomise:
            self.samples = draw_variation_samples(g, self.rng)
        radius = (
            length * g.base_radius * self.samples.radius_noise
            * self.samples.depth_taper ** depth
        )

        index = self.segments.append(Segment(
            start=Point3D.from_array(start),
            end=Point3D.from_array(end),
            radius=float(radius),
            depth=depth,
            parent=parent,
        ))
        self.state.parent = index
        self.state.position = end

        if g.tropism > 0:
            self.bend_toward_world_up(g.tropism)

    def bend_toward_world_up(self, strength: float) -> None:
        if self.world_up is None:
            return
        blended = normalize((1.0 - strength) * self.state.heading + strength * self.world_up)
        if blended is None:
            logger.debug("Tropism blend cancelled heading, kept previous heading")
            return
        self.state.heading = blended
        self.state.up = orthonormalize_up(blended, self.state.up)

    def turn(self, symbol: Symbol) -> None:
        jitter = self.rng.uniform(*self.grammar.angle_jitter_deg)
        base = symbol.param(0, self.policy.default_angle_deg)
        if symbol.tag in YAW_SIGNS:
            self.yaw(YAW_SIGNS[symbol.tag] * (base + jitter))
        else:
            self.pitch(PITCH_SIGNS[symbol.tag] * (base + jitter))

    def push(self) -> None:
        self.stack.append(self.state.copy())

    def pop(self) -> None:
        if not self.stack:
            logger.debug("Pop on empty turtle stack ignored")
            return
        self.state = self.stack.pop()

    def step(self, symbol: Symbol) -> None:
        tag = symbol.tag
        if tag == FORWARD:
            self.forward(symbol)
        elif tag in YAW_SIGNS or tag in PITCH_SIGNS:
            self.turn(symbol)
        elif tag == PUSH:
            self.push()
        elif tag == POP:
            self.pop()

    def run(self, symbols: Sequence[Symbol]) -> SegmentSet:
        self.wander()
        for symbol in symbols:
            self.step(symbol)
        return self.segments


def interpret(
    symbols: Sequence[Symbol],
    grammar: Grammar,
    rng: Optional[np.random.Generator] = None,
    policy: Optional[TurtlePolicy] = None,
    samples: Optional[VariationSamples] = None,
) -> SegmentSet:
    """
    Walk a symbol sequence and emit connected segments.

    Parameters
    ----------
    symbols : sequence of Symbol
        Expanded symbol sequence
    grammar : Grammar
        Grammar providing base radius and stochastic ranges
    rng : np.random.Generator, optional
        Shared run stream (unseeded if omitted)
    policy : TurtlePolicy, optional
        Initial frame and defaults
    samples : VariationSamples, optional
        Pre-drawn run samples; drawn from rng when omitted

    Returns
    -------
    SegmentSet
        Segments in emission order; parents always precede children
    """
    if rng is None:
        rng = np.random.default_rng()
    if policy is None:
        policy = TurtlePolicy()
    errors = policy.validate()
    if errors:
        raise ValueError(f"Invalid TurtlePolicy: {'; '.join(errors)}")
    if samples is None:
        samples = draw_variation_samples(grammar, rng)

    turtle = Turtle(grammar, rng, policy, samples)
    segments = turtle.run(symbols)

    if turtle.stack:
        logger.debug(f"{len(turtle.stack)} unmatched push symbols left on the stack")
    if turtle.skipped_rotations:
        logger.debug(f"Skipped {turtle.skipped_rotations} rotations with a degenerate axis")
    logger.info(f"Turtle emitted {len(segments)} segments from {len(symbols)} symbols")
    return segments


__all__ = [
    "VariationSamples",
    "draw_variation_samples",
    "TurtleState",
    "Turtle",
    "interpret",
    "FORWARD",
]
