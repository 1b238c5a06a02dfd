import typing

BucketName = typing.NewType("BucketName", str)
ObjectKey = typing.NewType("ObjectKey", str)

Backend = typing.Literal["s3", "https", "http"]
