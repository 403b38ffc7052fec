"""Common test utilities: sample datasets and a call-counting producer."""
import os

import boto3

RESULTS_CSV = """\
election,ambit,zone_type,zone_id,zone_name,complex_id,option,votes,percentage
plebiscito,nacional,region,13,Metropolitana,region_13,A favor,1200,40.0
plebiscito,nacional,region,13,Metropolitana,region_13,En contra,1800,60.0
plebiscito,nacional,comuna,5,Valparaíso,comuna_5,A favor,300,30.0
plebiscito,nacional,comuna,5,Valparaíso,comuna_5,En contra,700,70.0
plebiscito,nacional,comuna,50,Iquique,comuna_50,A favor,,
plebiscito,extranjero,pais_extranjero,05,Argentina,pais_extranjero_05,A favor,90,45.0
"""

ZONE_13_CSV = """\
type,id,name,parent_id
provincia,131,Santiago,13
provincia,132,Cordillera,13
comuna,13101,Santiago,131
comuna,13201,Puente Alto,132
"""

# name -> contents, relative to the schema root
SCHEMA_FILES = {
    'results.csv': RESULTS_CSV,
    '13_mesas.csv': 'mesa,votes\n1,10\n',
    '130_mesas.csv': 'mesa,votes\n1,20\n',
    'zones/13.csv': ZONE_13_CSV,
}

# The remote listing has one file that was never copied
REMOTE_FILES = {
    'results.csv': RESULTS_CSV,
    '13_mesas.csv': 'mesa,votes\n1,10\n',
    '05_mesas.csv': 'mesa,votes\n1,30\n',
}


def write_files(base_dir: str, files: dict) -> str:
    """Write {name: text} under base_dir, creating subdirectories as needed."""
    for name, text in files.items():
        path = os.path.join(base_dir, name)
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, 'w', encoding='utf-8') as f:
            f.write(text)
    return base_dir


def upload_files(bucket_name: str, prefix: str, files: dict) -> None:
    """Upload {name: text} to a (mocked) S3 bucket under prefix."""
    client = boto3.client('s3', region_name='us-east-1')
    for name, text in files.items():
        key = f'{prefix}/{name}' if prefix else name
        client.put_object(Bucket=bucket_name, Key=key, Body=text.encode('utf-8'))


class Producer:
    """Zero-argument producer that records how often it ran."""

    def __init__(self, value=None, error=None):
        self.value = value
        self.error = error
        self.calls = 0

    def __call__(self):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.value
