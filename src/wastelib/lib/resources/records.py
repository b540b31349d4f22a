"""Fixed layout records stored in the game files."""

from enum import IntEnum
from typing import List

from pydantic import BaseModel, ConfigDict, Field

from ..reader import BitReader
from .base import get_item

CHARACTER_SIZE = 256
SLOT_COUNT = 30
MOB_SIZE = 8
COMBAT_STRING_COUNT = 37
MAP_INFO_SIZE = 13 + COMBAT_STRING_COUNT


class ActionClass(IntEnum):
    NONE = 0
    PRINT = 1
    CHECK = 2
    FIXED_ENCOUNTER = 3
    MASK = 4
    LOOT = 5
    SPECIAL = 6
    UNKNOWN_07 = 7
    DIALOG = 8
    RAD = 9
    TRANSITION = 10
    BLOCKED = 11
    ALTER = 12
    UNKNOWN_0D = 13
    UNKNOWN_0E = 14
    RANDOM_ENCOUNTER = 15


class MobType(IntEnum):
    ANIMAL = 1
    MUTANT = 2
    HUMANOID = 3
    CYBORG = 4
    ROBOT = 5


class Skill(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    level: int


class Item(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    load: int
    jammed: bool = False


def read_skills(reader: BitReader) -> List[Skill]:
    """Reads all 30 skill slots and returns the occupied ones."""
    skills = []
    for _ in range(SLOT_COUNT):
        skill_id = reader.read_uint8()
        level = reader.read_uint8()
        if skill_id:
            skills.append(Skill(id=skill_id, level=level))
    return skills


def read_items(reader: BitReader) -> List[Item]:
    """Reads all 30 item slots and returns the occupied ones."""
    items = []
    for _ in range(SLOT_COUNT):
        item_id = reader.read_uint8()
        load = reader.read_uint8()
        if item_id:
            items.append(Item(id=item_id, load=load))
    return items


class Character(BaseModel):
    """
    A 256 byte character record used for player characters and NPCs.
    Fields named after their offset have no known meaning and are kept
    as stored.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    strength: int
    intelligence: int
    luck: int
    speed: int
    agility: int
    dexterity: int
    charisma: int
    money: int
    gender: int
    nationality: int
    armor_class: int
    max_con: int
    con: int
    weapon: int
    skill_points: int
    experience: int
    level: int
    armor: int
    last_con: int
    afflictions: int
    npc: bool
    unknown_2a: int
    item_refuse: int
    skill_refuse: int
    attrib_refuse: int
    trade_refuse: int
    unknown_2f: int
    join_string: int
    willingness: int
    rank: str
    game_won: bool
    special_promotion: bool
    unknown_4d: bytes = Field(..., description="51 bytes")
    skills: List[Skill]
    unknown_bc: int
    items: List[Item]
    unknown_f9: bytes = Field(..., description="7 bytes")


def read_character(reader: BitReader) -> Character:
    return Character(
        name=reader.read_null_string(14),
        strength=reader.read_uint8(),
        intelligence=reader.read_uint8(),
        luck=reader.read_uint8(),
        speed=reader.read_uint8(),
        agility=reader.read_uint8(),
        dexterity=reader.read_uint8(),
        charisma=reader.read_uint8(),
        money=reader.read_uint24(),
        gender=reader.read_uint8(),
        nationality=reader.read_uint8(),
        armor_class=reader.read_uint8(),
        max_con=reader.read_uint16(),
        con=reader.read_uint16(),
        weapon=reader.read_uint8(),
        skill_points=reader.read_uint8(),
        experience=reader.read_uint24(),
        level=reader.read_uint8(),
        armor=reader.read_uint8(),
        last_con=reader.read_uint16(),
        afflictions=reader.read_uint8(),
        npc=reader.read_uint8() == 1,
        unknown_2a=reader.read_uint8(),
        item_refuse=reader.read_uint8(),
        skill_refuse=reader.read_uint8(),
        attrib_refuse=reader.read_uint8(),
        trade_refuse=reader.read_uint8(),
        unknown_2f=reader.read_uint8(),
        join_string=reader.read_uint8(),
        willingness=reader.read_uint8(),
        rank=reader.read_null_string(25),
        game_won=reader.read_uint8() == 1,
        special_promotion=reader.read_uint8() == 1,
        unknown_4d=reader.read_uint8s(51),
        skills=read_skills(reader),
        unknown_bc=reader.read_uint8(),
        items=read_items(reader),
        unknown_f9=reader.read_uint8s(7),
    )


class Mob(BaseModel):
    """Monster statistics. Four fields share two bytes as nibbles."""

    model_config = ConfigDict(frozen=True)

    name: str
    hit_points: int
    hit_chance: int
    random_damage: int
    max_group_size: int
    armor_class: int
    fixed_damage: int
    damage_type: int
    mob_type: int
    portrait: int

    @property
    def min_hit_points(self) -> int:
        return self.hit_points >> 2

    @property
    def max_hit_points(self) -> int:
        return (self.hit_points >> 2) + self.hit_points

    @property
    def experience(self) -> int:
        return self.hit_points * (self.armor_class + 1)


def read_mob(reader: BitReader, name: str) -> Mob:
    return Mob(
        name=name,
        hit_points=reader.read_uint16(),
        hit_chance=reader.read_uint8(),
        random_damage=reader.read_uint8(),
        max_group_size=reader.read_bits(4),
        armor_class=reader.read_bits(4),
        fixed_damage=reader.read_bits(4),
        damage_type=reader.read_bits(4),
        mob_type=reader.read_uint8(),
        portrait=reader.read_uint8(),
    )


class MapInfo(BaseModel):
    """The 50 byte map info block of a map header."""

    model_config = ConfigDict(frozen=True)

    unknown_00: int
    unknown_01: int
    map_size: int
    unknown_03: int
    unknown_04: int
    encounter_frequency: int
    tileset: int
    random_monster_types: int
    max_random_encounters: int
    border_tile: int
    time_per_step: int
    heal_rate: int
    combat_string_ids: List[int]

    def get_combat_string_id(self, index: int) -> int:
        return get_item(self.combat_string_ids, index, "Combat string")


def read_map_info(reader: BitReader) -> MapInfo:
    return MapInfo(
        unknown_00=reader.read_uint8(),
        unknown_01=reader.read_uint8(),
        map_size=reader.read_uint8(),
        unknown_03=reader.read_uint8(),
        unknown_04=reader.read_uint8(),
        encounter_frequency=reader.read_uint8(),
        tileset=reader.read_uint8(),
        random_monster_types=reader.read_uint8(),
        max_random_encounters=reader.read_uint8(),
        border_tile=reader.read_uint8(),
        time_per_step=reader.read_uint16(),
        heal_rate=reader.read_uint8(),
        combat_string_ids=list(reader.read_uint8s(COMBAT_STRING_COUNT)),
    )
