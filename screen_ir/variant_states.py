"""
Variant / interaction-state detection for component sets.

Variant components are named ``Property=Value, Property=Value``; their
values are unioned per property. Values of a state-like property
(state / variant / status) are mapped onto interaction states, refined
by the visual differences of the variant that carries them.
"""

import logging
import re
from typing import Optional

from .types import RawNode, SolidFill, StateStyle, VariantDetection, VariantProperty

logger = logging.getLogger(__name__)

STATE_PROPERTY_NAMES = ("state", "variant", "status")
INDICATOR_HINTS = ("spinner", "loader", "loading", "error", "alert", "warning", "check", "success")
DISABLED_OPACITY = 0.6

_VARIANT_PART = re.compile(r"^([^=]+)=(.+)$")


def _normalize(text: str) -> str:
    return re.sub(r"[^a-z0-9]", "", (text or "").lower())


def parse_variant_name(name: str) -> dict:
    """'Size=Large, State=Pressed' → {'Size': 'Large', 'State': 'Pressed'}."""
    properties = {}
    for part in (name or "").split(","):
        match = _VARIANT_PART.match(part.strip())
        if match:
            properties[match.group(1).strip()] = match.group(2).strip()
    return properties


def variants_from_children(children: list) -> list:
    values_by_prop: dict[str, set] = {}
    for child in children:
        if child.type != "COMPONENT":
            continue
        for prop, value in parse_variant_name(child.name).items():
            values_by_prop.setdefault(prop, set()).add(value)
    variants = []
    for prop, values in values_by_prop.items():
        ordered = sorted(values)
        variants.append(VariantProperty(name=prop, values=ordered, default_value=ordered[0]))
    return variants


def variants_from_definitions(definitions: dict) -> list:
    variants = []
    for prop, definition in definitions.items():
        if definition.type != "VARIANT" or not definition.options:
            continue
        default = definition.value or definition.options[0]
        variants.append(VariantProperty(name=prop, values=list(definition.options), default_value=default))
    return variants


def detect_state_type(prop_name: str, prop_value: str) -> Optional[str]:
    if _normalize(prop_name) not in STATE_PROPERTY_NAMES:
        return None
    value = _normalize(prop_value)
    if "press" in value or value == "active":
        return "pressed"
    if "disable" in value:
        return "disabled"
    if "load" in value:
        return "loading"
    if "error" in value or "invalid" in value:
        return "error"
    if "hover" in value:
        return "hover"
    if "focus" in value:
        return "focused"
    if "default" in value or "normal" in value or value == "idle":
        return "default"
    return None


def _alpha_text(alpha: float) -> str:
    if float(alpha).is_integer():
        return str(int(alpha))
    return str(alpha)


def analyze_visual_state(node: RawNode) -> tuple:
    """(style overrides, has indicator) for one variant component."""
    overrides = {}
    has_indicator = False

    if node.opacity is not None and node.opacity < 1:
        overrides["opacity"] = node.opacity
        if node.opacity <= DISABLED_OPACITY:
            has_indicator = True

    if node.visible is False:
        overrides["display"] = "none"

    if node.fills and isinstance(node.fills[0], SolidFill):
        color = node.fills[0].color
        overrides["backgroundColor"] = f"rgba({color.r}, {color.g}, {color.b}, {_alpha_text(color.a)})"

    for child in node.children:
        if any(hint in _normalize(child.name) for hint in INDICATOR_HINTS):
            has_indicator = True

    return overrides, has_indicator


def detect_states(node: RawNode, variants: list) -> list:
    states = {"default": StateStyle(state="default")}

    for variant in variants:
        for value in variant.values:
            state = detect_state_type(variant.name, value)
            if state and state not in states:
                states[state] = StateStyle(state=state)

    for child in node.children:
        if child.type != "COMPONENT":
            continue
        detected = None
        for prop, value in parse_variant_name(child.name).items():
            detected = detect_state_type(prop, value)
            if detected:
                break
        if not detected:
            continue
        overrides, has_indicator = analyze_visual_state(child)
        existing = states.get(detected) or StateStyle(state=detected)
        states[detected] = StateStyle(
            state=detected,
            style_overrides={**existing.style_overrides, **overrides},
            has_indicator=existing.has_indicator or has_indicator,
        )

    return list(states.values())


def detect_variants_and_states(node: RawNode) -> VariantDetection:
    is_set = node.type == "COMPONENT_SET"
    if is_set and node.children:
        variants = variants_from_children(node.children)
    else:
        variants = variants_from_definitions(node.component_properties)
    states = detect_states(node, variants)
    if variants:
        logger.debug("%s: %d variant properties, %d states", node.name, len(variants), len(states))
    return VariantDetection(is_component_set=is_set, variants=variants, states=states)
