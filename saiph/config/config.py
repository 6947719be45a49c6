import yaml
from typing import Dict

logo = r'''--------------------------------------------------
     ____        _       _
    / ___|  __ _(_)_ __ | |__
    \___ \ / _` | | '_ \| '_ \
     ___) | (_| | | |_) | | | |
    |____/ \__,_|_| .__/|_| |_|
                  |_|
    A 5-stage pipeline simulator based on Amaranth
--------------------------------------------------'''

header = '''\033[1;33m{logo}\033[0m

\033[0;32mConfiguration\033[0;0m
Variant name: {variant}
Path config file: {configfile}

\033[0;32mSimulation parameters\033[0;0m'''


def load_config(variant: str, configfile: str, verbose: bool) -> Dict:
    with open(configfile) as f:
        core_config = yaml.load(f.read(), Loader=yaml.SafeLoader)
    config = {}

    if not isinstance(core_config, dict):
        raise RuntimeError(f'Invalid configuration file: {configfile}')

    for key, item in core_config.items():
        if isinstance(item, dict):
            for k2, i2 in item.items():
                config['{}_{}'.format(key, k2)] = i2
        else:
            config[key] = item

    if verbose:
        print(header.format(logo=logo, variant=variant, configfile=configfile))
        for key, item in core_config.items():
            if isinstance(item, dict):
                print(f'{key}:')
                for k2, i2 in item.items():
                    print(f'- {k2}: {i2}')
            else:
                print(f'{key}: {item}')
        print('--------------------------------------------------')

    return config
