#!/usr/bin/env python3
import os

import aws_cdk as cdk

from stacks import ApiStack, CognitoPostConfirmationStack, StorageStack


def context_or_env(app, key, env_name, default=None):
    return app.node.try_get_context(key) or os.getenv(env_name) or default


app = cdk.App()

env = cdk.Environment(
    account=os.getenv('CDK_DEFAULT_ACCOUNT'),
    region=os.getenv('CDK_DEFAULT_REGION', 'eu-west-2'),
)

system_name = context_or_env(app, 'systemName', 'SYSTEM_NAME', 'image-gallery')
database_name = context_or_env(app, 'databaseName', 'POSTGRES_DATABASE_NAME', 'postgres')
domain_name = context_or_env(app, 'domainName', 'DOMAIN_NAME')
allowed_origins = [f'https://{domain_name}'] if domain_name else None

storage = StorageStack(
    app, f'{system_name}-storage',
    allowed_origins=allowed_origins,
    env=env,
    description='Image bucket, CloudFront distribution and discovery parameters',
)

ApiStack(
    app, f'{system_name}-api',
    bucket=storage.bucket,
    domain_name=domain_name,
    hosted_zone_id=context_or_env(app, 'hostedZoneId', 'HOSTED_ZONE_ID'),
    hosted_zone_name=context_or_env(app, 'hostedZoneName', 'HOSTED_ZONE_NAME'),
    api_subdomain=context_or_env(app, 'apiSubdomain', 'API_SUBDOMAIN', 'api'),
    database_name=database_name,
    cdn_domain=storage.distribution.distribution_domain_name,
    env=env,
    description='Image Service API Gateway and Lambda',
)

CognitoPostConfirmationStack(
    app, f'{system_name}-post-confirmation',
    system_name=system_name,
    database_name=database_name,
    env=env,
)

app.synth()
