from aokege.CLI import cli


if __name__ == "__main__":
    cli()
