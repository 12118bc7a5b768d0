"""Shared packaging for the Python Lambda functions in ../lambda."""

import os

from aws_cdk import BundlingOptions
from aws_cdk import aws_iam as iam
from aws_cdk import aws_lambda as _lambda

LAMBDA_DIR = os.path.join(os.path.dirname(__file__), '..', '..', 'lambda')
RUNTIME = _lambda.Runtime.PYTHON_3_12


def lambda_code() -> _lambda.Code:
    """Asset with requirements.txt installed next to the handler modules."""
    return _lambda.Code.from_asset(
        LAMBDA_DIR,
        exclude=['tests', '__pycache__', '*.pyc'],
        bundling=BundlingOptions(
            image=RUNTIME.bundling_image,
            command=[
                'bash', '-c',
                'pip install --no-cache-dir -r requirements.txt -t /asset-output && cp -au . /asset-output',
            ],
        ),
    )


def grant_database_access(fn: _lambda.Function, region: str, account: str) -> None:
    """SSM parameters under /rds/* and the credentials secret they point at."""
    fn.add_to_role_policy(
        iam.PolicyStatement(
            actions=['ssm:GetParameter', 'ssm:GetParameters'],
            resources=[f'arn:aws:ssm:{region}:{account}:parameter/rds/*'],
        )
    )
    # RDS-managed credentials secrets are named rds!..., the exact ARN lives in SSM
    fn.add_to_role_policy(
        iam.PolicyStatement(
            actions=['secretsmanager:GetSecretValue'],
            resources=[f'arn:aws:secretsmanager:{region}:{account}:secret:rds*'],
        )
    )
