import os

# boto3 clients built without an explicit region (open_storage, open_source)
os.environ.setdefault('AWS_DEFAULT_REGION', 'us-east-1')
