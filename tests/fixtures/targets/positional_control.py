def main(Name: str, verbose: bool = False):
    return Name
