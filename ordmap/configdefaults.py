from ordmap.configparser import (
    BoolParam,
    EnumStr,
    OrdmapConfigParser,
    _create_default_config,
)


def add_ordered_map_configvars(config: OrdmapConfigParser):
    config.add(
        "check_invariants",
        "Verify that key order and stored values agree after every mutation "
        "of an OrderedMap. Slow, meant for debugging.",
        BoolParam(False),
    )

    config.add(
        "on_ignored_index",
        "What to do when a positional insert or assignment targets a key that "
        "already exists elsewhere in the map. 'ignore' updates the value in place, "
        "'warn' does the same after emitting an IgnoredIndexWarning, "
        "'raise' refuses the operation with a ValueError.",
        EnumStr("ignore", ["warn", "raise"]),
    )

    config.add(
        "copy_on_write",
        "Let copies of an OrderedMap share storage until one of them is mutated. "
        "When False, copies are made eagerly.",
        BoolParam(True),
    )


# The config object is created here and registered with all of its
# variables before anything else imports it.
config = _create_default_config()
add_ordered_map_configvars(config)
config.warn_unused_flags()
