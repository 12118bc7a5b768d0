"""
Image storage: private S3 bucket, CloudFront in front of it, and SSM
parameters that publish both names for runtime discovery.
"""
from typing import Any, Optional, Sequence

from aws_cdk import CfnOutput, RemovalPolicy, Stack
from aws_cdk import aws_cloudfront as cloudfront
from aws_cdk import aws_cloudfront_origins as origins
from aws_cdk import aws_s3 as s3
from aws_cdk import aws_ssm as ssm
from constructs import Construct

BUCKET_NAME_PARAMETER = '/storage/bucket-name'
CDN_DOMAIN_PARAMETER = '/storage/cdn-domain'


class StorageStack(Stack):

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        allowed_origins: Optional[Sequence[str]] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(scope, construct_id, **kwargs)

        # Browsers PUT directly to presigned URLs, so CORS must allow it
        self.bucket = s3.Bucket(
            self,
            'ImageBucket',
            block_public_access=s3.BlockPublicAccess.BLOCK_ALL,
            encryption=s3.BucketEncryption.S3_MANAGED,
            enforce_ssl=True,
            removal_policy=RemovalPolicy.RETAIN,
            cors=[
                s3.CorsRule(
                    allowed_methods=[s3.HttpMethods.PUT, s3.HttpMethods.GET, s3.HttpMethods.HEAD],
                    allowed_origins=list(allowed_origins or ['*']),
                    allowed_headers=['*'],
                    max_age=3000,
                )
            ],
        )

        self.distribution = cloudfront.Distribution(
            self,
            'ImageDistribution',
            default_behavior=cloudfront.BehaviorOptions(
                origin=origins.S3BucketOrigin.with_origin_access_control(self.bucket),
                viewer_protocol_policy=cloudfront.ViewerProtocolPolicy.REDIRECT_TO_HTTPS,
                cache_policy=cloudfront.CachePolicy.CACHING_OPTIMIZED,
            ),
        )

        ssm.StringParameter(
            self,
            'BucketNameParameter',
            parameter_name=BUCKET_NAME_PARAMETER,
            string_value=self.bucket.bucket_name,
        )
        ssm.StringParameter(
            self,
            'CdnDomainParameter',
            parameter_name=CDN_DOMAIN_PARAMETER,
            string_value=self.distribution.distribution_domain_name,
        )

        CfnOutput(self, 'ImageBucketName', value=self.bucket.bucket_name)
        CfnOutput(self, 'CdnDomainName', value=self.distribution.distribution_domain_name)
